"""kaipack: pack a web-app directory into a two-entry installable package."""

__version__ = "0.1.0"
