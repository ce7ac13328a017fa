from sfetch.proxy import SFetch

__all__ = ["SFetch"]
