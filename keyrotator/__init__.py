"""
keyrotator — rotates application identity passwords and republishes them to a vault.

Public API:
    RotationEngine.rotate(identity_id)   → Outcome for one identity
    RotationEngine.rotate_all()          → AggregateOutcome for every tagged identity
    build_engine(config)                 → engine wired to the REST clients
"""

__version__ = "0.1.0"
