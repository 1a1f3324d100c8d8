"""Product models exchanged by the catalog routes and the chat pipeline."""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class ProductOut(CamelModel):
    id: int
    name: str
    description: str = ""
    price: float
    sale_price: Optional[float] = None
    categories: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    in_stock: bool = True
    featured: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def on_sale(self) -> bool:
        return self.sale_price is not None


class ProductCreate(CamelModel):
    name: str
    description: str = ""
    price: float = Field(gt=0)
    sale_price: Optional[float] = None
    categories: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    in_stock: bool = True
    featured: bool = False


class ProductUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    sale_price: Optional[float] = None
    categories: Optional[List[str]] = None
    images: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None


class ProductPage(CamelModel):
    products: List[ProductOut]
    current_page: int
    total_pages: int
    total: int
