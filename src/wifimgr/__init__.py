"""wifimgr - manage sites and devices registered in a Mist inventory."""

__version__ = "0.1.0"
