"""TruthShield Pro: gamified online-safety backend with a rule-based content threat classifier."""

__version__ = "1.0.0"
