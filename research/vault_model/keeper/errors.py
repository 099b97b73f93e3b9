"""Off-chain keeper errors, caught at the tick boundary"""

class KeeperError(Exception):
    """Base error class for keeper infrastructure errors"""
    pass

class ConfigError(KeeperError):
    """Error for missing or invalid keeper configuration"""
    pass

class NetworkNotFoundError(KeeperError):
    """Error for an unknown chain selector name"""
    pass

class SubmissionError(KeeperError):
    """Error for a transaction that could not be signed or broadcast"""
    pass
