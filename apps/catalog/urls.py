from django.urls import path

from apps.catalog import views

admin_urlpatterns = [
    path('admin/storefront/products', views.AdminProductListAPIView.as_view(), name='admin_products'),
    path('admin/storefront/products/<str:product_id>', views.AdminProductDetailAPIView.as_view(), name='admin_product_detail'),
    path('admin/storefront/products/<str:product_id>/enrich', views.AdminProductEnrichAPIView.as_view(), name='admin_product_enrich'),
    path('admin/storefront/products/<str:product_id>/images', views.AdminProductImageUploadAPIView.as_view(), name='admin_product_image_upload'),
    path('admin/storefront/products/<str:product_id>/images/set', views.AdminProductImageSetAPIView.as_view(), name='admin_product_image_set'),
    path('admin/storefront/products/<str:product_id>/images/<str:asset_id>', views.AdminProductImageDeleteAPIView.as_view(), name='admin_product_image_delete'),
    path('admin/storefront/categories', views.AdminCategoryListAPIView.as_view(), name='admin_categories'),
    path('admin/storefront/categories/<str:category_id>', views.AdminCategoryDetailAPIView.as_view(), name='admin_category_detail'),
]

public_urlpatterns = [
    path('public/storefront/<str:org_id>/products', views.PublicProductListAPIView.as_view(), name='public_products'),
    path('public/storefront/<str:org_id>/available-products', views.PublicProductPageAPIView.as_view(), name='public_products_page'),
    path('public/storefront/<str:org_id>/products/<str:product_id>', views.PublicProductDetailAPIView.as_view(), name='public_product_detail'),
    path('public/storefront/<str:org_id>/categories', views.PublicCategoryListAPIView.as_view(), name='public_categories'),
]

internal_urlpatterns = [
    path('internal/products/batch', views.InternalProductBatchAPIView.as_view(), name='internal_products_batch'),
    path('internal/products/<str:product_id>', views.InternalProductDetailAPIView.as_view(), name='internal_product_detail'),
]

urlpatterns = admin_urlpatterns + public_urlpatterns + internal_urlpatterns
