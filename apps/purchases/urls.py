from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'purchases'

# Router for ViewSets
# Note: credits must be registered BEFORE empty prefix to avoid URL conflicts
router = DefaultRouter()
router.register(r'credits', views.CreditViewSet, basename='credit')
router.register(r'', views.PurchaseRecordViewSet, basename='purchase')

urlpatterns = [
    # Store integration
    # POST   /api/purchases/store-events/                  - Record store transaction
    # POST   /api/purchases/restore/                       - Restore purchases
    # POST   /api/purchases/{transaction_id}/mark-restored/ - Mark as restored
    path('store-events/', views.store_events, name='store-events'),
    path('restore/', views.restore_purchases, name='restore'),
    path('<str:transaction_id>/mark-restored/', views.mark_restored, name='mark-restored'),

    # Router URLs
    # GET    /api/purchases/                         - List records
    # GET    /api/purchases/{id}/                    - Record with credits
    # GET    /api/purchases/credits/                 - Available credits
    # GET    /api/purchases/credits/summary/         - Available count
    # GET    /api/purchases/credits/history/         - Credits spent by a profile
    # POST   /api/purchases/credits/{id}/consume/    - Consume credit
    path('', include(router.urls)),
]
