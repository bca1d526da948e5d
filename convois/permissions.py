from rest_framework import permissions


class IsSuperAdmin(permissions.BasePermission):
    """
    Permission réservée aux Super Admins.
    """
    message = "Vous n'avez pas la permission d'effectuer cette action"

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False

        return request.user.est_super_admin


class IsSuperAdminOrReadOnly(permissions.BasePermission):
    """
    Permission pour les Super Admins (écriture) ou lecture seule pour les autres.
    """
    message = "Vous n'avez pas la permission d'effectuer cette action"

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        return request.user.est_super_admin


class IsDestinataire(permissions.BasePermission):
    """
    Permission pour ne manipuler que ses propres notifications.
    """
    def has_object_permission(self, request, view, obj):
        return obj.destinataire_id == request.user.id
