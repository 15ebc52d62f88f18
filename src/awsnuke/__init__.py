"""aws-nuke - remove all resources from an AWS account."""

__version__ = "0.1.0"
