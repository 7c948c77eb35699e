from django.urls import include, path

urlpatterns = [
    path('api/packman/', include('packman.urls')),
]
