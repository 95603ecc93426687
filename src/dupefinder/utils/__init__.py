from .convert_utils import ConvertUtils

__all__ = ["ConvertUtils"]
