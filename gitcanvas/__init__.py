"""gitcanvas - freely arrangeable commit graph for git repositories"""

__version__ = "0.3.0"
