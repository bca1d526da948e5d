from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    UtilisateurViewSet, EditionMawlidViewSet, SousLocaliteViewSet, SectionViewSet,
    DeplacementViewSet, CarViewSet, IncidentViewSet, NotificationViewSet
)
from .views_auth import ConnexionView, register, me, change_password
from .views_dashboard import (
    dashboard_stats, dashboard_stats_by_sous_localite, dashboard_cars_realtime,
    dashboard_timeline, rapport_edition, rapport_deplacement
)

router = DefaultRouter()
router.register(r'utilisateurs', UtilisateurViewSet)
router.register(r'editions', EditionMawlidViewSet)
router.register(r'sous-localites', SousLocaliteViewSet)
router.register(r'sections', SectionViewSet)
router.register(r'deplacements', DeplacementViewSet)
router.register(r'cars', CarViewSet)
router.register(r'incidents', IncidentViewSet)
router.register(r'notifications', NotificationViewSet, basename='notification')

app_name = 'convois'

urlpatterns = [
    # Authentification
    path('api/auth/register/', register, name='register'),
    path('api/auth/login/', ConnexionView.as_view(), name='token_obtain_pair'),
    path('api/auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/auth/me/', me, name='me'),
    path('api/auth/change-password/', change_password, name='change_password'),

    # Tableau de bord
    path('api/dashboard/stats/', dashboard_stats, name='dashboard_stats'),
    path('api/dashboard/stats/by-sous-localite/', dashboard_stats_by_sous_localite,
         name='dashboard_stats_by_sous_localite'),
    path('api/dashboard/cars-realtime/', dashboard_cars_realtime, name='dashboard_cars_realtime'),
    path('api/dashboard/timeline/', dashboard_timeline, name='dashboard_timeline'),

    # Rapports
    path('api/rapports/edition/<int:edition_id>/', rapport_edition, name='rapport_edition'),
    path('api/rapports/deplacement/<int:deplacement_id>/', rapport_deplacement, name='rapport_deplacement'),

    # API REST
    path('api/', include(router.urls)),
]
