"""
Application Layer - Sampling Orchestration

Contains the sampler that projects router snapshots into the metric set,
the scheduler that drives it, process configuration, and the interfaces
the infrastructure layer implements.
"""
