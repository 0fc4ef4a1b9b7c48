"""SwiftChain: INR to crypto transfers on a test network."""

__version__ = "0.1.0"
