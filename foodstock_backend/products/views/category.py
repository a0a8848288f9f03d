# products/views/category.py

from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from products.models import Category
from products.serializers.category import CategorySerializer


class CategoryViewSet(viewsets.ModelViewSet):
    """
    Category API

    Any authenticated user can read and manage categories
    (product forms need the dropdown).
    """

    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated]
