"""panda-chat -- terminal client for the PandaDocs template assistant."""

__version__ = '0.3.0'
