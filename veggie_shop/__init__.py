"""
Veggie Shop - vegetable delivery storefront service
"""
__version__ = "1.0.0"
