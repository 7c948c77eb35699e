"""
URLconf for Packman.

Usage in the host project's urls.py:
    path('api/packman/', include('packman.urls')),
"""

from django.urls import path

from packman import views

app_name = 'packman'

urlpatterns = [
    path('documents/', views.DocumentCollectionView.as_view(), name='document-list'),
    path('documents/<int:document_id>/', views.DocumentDetailView.as_view(), name='document-detail'),
    path('documents/<int:document_id>/approve/', views.DocumentApproveView.as_view(), name='document-approve'),
    path('documents/<int:document_id>/transmit/', views.DocumentTransmitView.as_view(), name='document-transmit'),
    path('stock/<str:store_code>/', views.StockView.as_view(), name='stock-store'),
    path('stock/<str:store_code>/<str:product_id>/', views.StockView.as_view(), name='stock-entry'),
]
