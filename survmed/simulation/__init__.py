"""Population simulation: covariates, mediator and survival outcome"""
