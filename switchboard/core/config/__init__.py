"""
Configuration subsystem for Switchboard.

Static configuration is loaded from environment variables (.env supported)
at startup and exposed through the ``Config`` class.

Usage
-----
```python
from switchboard.core.config import Config

Config.validate()
token = Config.DISCORD_TOKEN
```
"""

from switchboard.core.config.config import Config, Environment

__all__ = [
    "Config",
    "Environment",
]
