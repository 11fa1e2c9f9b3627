"""Data package: sqlite record store and report file encoders."""

from bagline.data.db import Db
from bagline.data.repository import Repository

__all__ = ["Db", "Repository"]
