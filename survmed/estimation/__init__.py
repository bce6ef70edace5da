"""Cox model capability and the two-model mediation estimator"""
