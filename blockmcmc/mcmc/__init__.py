"""Adaptive Metropolis-within-Gibbs sampling.

Public entry point is ``run_mcmc``; the remaining names are the building
blocks it composes (proposal strategies, acceptance rule, adaptation).
"""

from blockmcmc.mcmc.acceptance import AcceptanceController, AcceptanceOutcome, Counters
from blockmcmc.mcmc.adaptation import Adapter, learn_covariance, scale_tuning
from blockmcmc.mcmc.config import MCMCConfig, MultivariateConfig
from blockmcmc.mcmc.core import (
    MCMCResult,
    SamplerPhase,
    chain_file_path,
    phase_for_iteration,
    run_mcmc,
)
from blockmcmc.mcmc.posterior import create_posterior
from blockmcmc.mcmc.proposals import (
    CyclicUnits,
    MultivariateProposal,
    ProposalStrategy,
    UnivariateProposal,
    create_proposal,
)

__all__ = [
    "run_mcmc",
    "MCMCResult",
    "SamplerPhase",
    "phase_for_iteration",
    "chain_file_path",
    "MCMCConfig",
    "MultivariateConfig",
    "create_posterior",
    # Proposals
    "ProposalStrategy",
    "UnivariateProposal",
    "MultivariateProposal",
    "CyclicUnits",
    "create_proposal",
    # Acceptance
    "AcceptanceController",
    "AcceptanceOutcome",
    "Counters",
    # Adaptation
    "Adapter",
    "scale_tuning",
    "learn_covariance",
]
