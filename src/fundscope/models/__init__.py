from fundscope.models.fund import Fund

__all__ = ["Fund"]
