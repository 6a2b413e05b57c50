from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Custom permission to only allow administrators to access certain views.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and
                    getattr(request.user, 'role', None) == 'admin')


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Custom permission to only allow the applicant who owns an object or an admin to access it.
    """
    def has_object_permission(self, request, view, obj):
        if getattr(request.user, 'role', None) == 'admin':
            return True

        # Loan applications
        if hasattr(obj, 'applicant_id'):
            return obj.applicant_id == request.user.id

        # Payments and installments hang off an application
        if hasattr(obj, 'application'):
            return obj.application.applicant_id == request.user.id

        return False
