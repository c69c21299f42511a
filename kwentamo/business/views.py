from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from .models import Business
from .serializers import BusinessSerializer, ProfileSerializer
from kwentamo.core.utils import create_audit_log, diff_fields


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_profile(request):
    """Current user's profile; PATCH updates name and phone"""
    user = request.user
    if request.method == 'PATCH':
        changes = diff_fields(user, request.data, ['name', 'phone'])
        for field in ('name', 'phone'):
            if field in request.data:
                setattr(user, field, (request.data.get(field) or '').strip())
        user.save()
        if changes:
            create_audit_log(
                request=request, action='update', model_name='User',
                object_id=user.id, object_name=user.username, changes=changes,
            )
    return Response(ProfileSerializer(user).data)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def user_business(request):
    """Get, or create-or-update, the current user's business"""
    business = Business.objects.filter(user=request.user).first()

    if request.method == 'GET':
        if not business:
            return Response({'error': 'Business not set up yet'}, status=status.HTTP_404_NOT_FOUND)
        return Response(BusinessSerializer(business).data)

    if business:
        changes = diff_fields(business, request.data, [
            'business_name', 'business_type', 'address', 'phone', 'tax_id',
            'employee_count', 'avg_monthly_sales', 'raw_material_source', 'overhead_rate',
        ])
        serializer = BusinessSerializer(business, data=request.data, partial=True)
    else:
        changes = {}
        serializer = BusinessSerializer(data=request.data)
        if 'business_name' not in request.data:
            return Response({'business_name': ['Business name is required.']},
                            status=status.HTTP_400_BAD_REQUEST)

    if serializer.is_valid():
        created = business is None
        business = serializer.save(user=request.user)
        create_audit_log(
            request=request,
            action='create' if created else 'update',
            model_name='Business',
            object_id=business.id,
            object_name=business.business_name,
            changes=changes,
        )
        return Response(
            serializer.data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
