"""Issue tracker core: entities, storage backends and the domain service"""

__version__ = "0.1.0"
