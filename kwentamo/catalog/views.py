import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import F
from django.shortcuts import get_object_or_404
from .models import Ingredient, Recipe
from .serializers import IngredientSerializer, RecipeSerializer
from .filters import IngredientFilter, RecipeFilter
from .costing import recipe_cost_breakdown
from kwentamo.core.utils import create_audit_log, diff_fields

logger = logging.getLogger(__name__)

INGREDIENT_AUDIT_FIELDS = ['name', 'category', 'unit', 'cost_per_unit', 'current_stock', 'reorder_level', 'supplier']
RECIPE_AUDIT_FIELDS = ['name', 'category', 'servings', 'preparation_time', 'labor_rate_per_hour',
                       'selling_price', 'is_active']


def _bulk_rows(request, key):
    """Rows of a bulk payload: either a bare list or {key: [...]}"""
    data = request.data
    if isinstance(data, dict):
        data = data.get(key)
    return data if isinstance(data, list) else None


# Ingredient views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def ingredient_list_create(request):
    """List the user's ingredients or create a new one"""
    if request.method == 'GET':
        filterset = IngredientFilter(request.query_params, queryset=Ingredient.objects.filter(user=request.user))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = IngredientSerializer(filterset.qs.order_by('name'), many=True)
        return Response(serializer.data)

    serializer = IngredientSerializer(data=request.data)
    if serializer.is_valid():
        ingredient = serializer.save(user=request.user)
        create_audit_log(
            request=request, action='create', model_name='Ingredient',
            object_id=ingredient.id, object_name=ingredient.name,
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def ingredient_bulk_create(request):
    """
    Create many ingredients at once (spreadsheet import).

    All rows are validated first; if any row fails nothing is saved and the
    errors are reported by row index.
    """
    rows = _bulk_rows(request, 'ingredients')
    if not rows:
        return Response({'error': 'Provide a non-empty list of ingredients'}, status=status.HTTP_400_BAD_REQUEST)

    serializers_ = [IngredientSerializer(data=row) for row in rows]
    errors = [
        {'index': index, 'errors': serializer.errors}
        for index, serializer in enumerate(serializers_)
        if not serializer.is_valid()
    ]
    if errors:
        return Response({'errors': errors}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        created = [serializer.save(user=request.user) for serializer in serializers_]

    create_audit_log(
        request=request, action='bulk_create', model_name='Ingredient',
        object_id=created[0].id, object_name=f"{len(created)} ingredients",
        changes={'count': len(created), 'ids': [ingredient.id for ingredient in created]},
    )
    logger.info(f"User {request.user.id} imported {len(created)} ingredients")
    return Response({
        'created': len(created),
        'results': IngredientSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def ingredient_detail(request, pk):
    """Retrieve, update or delete an ingredient"""
    ingredient = get_object_or_404(Ingredient, pk=pk, user=request.user)

    if request.method == 'GET':
        serializer = IngredientSerializer(ingredient)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        changes = diff_fields(ingredient, request.data, INGREDIENT_AUDIT_FIELDS)
        serializer = IngredientSerializer(ingredient, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='Ingredient',
                object_id=ingredient.id, object_name=ingredient.name, changes=changes,
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        used_by = list(
            Recipe.objects.filter(recipe_ingredients__ingredient=ingredient).values_list('name', flat=True)
        )
        if used_by:
            return Response(
                {'error': f"Ingredient is used by recipes: {', '.join(used_by)}"},
                status=status.HTTP_400_BAD_REQUEST
            )
        ingredient_id, ingredient_name = ingredient.id, ingredient.name
        ingredient.delete()
        create_audit_log(
            request=request, action='delete', model_name='Ingredient',
            object_id=ingredient_id, object_name=ingredient_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ingredient_low_stock(request):
    """Ingredients at or below their reorder level"""
    queryset = Ingredient.objects.filter(
        user=request.user, current_stock__lte=F('reorder_level')
    ).order_by('current_stock', 'name')
    serializer = IngredientSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ingredient_categories(request):
    categories = (
        Ingredient.objects.filter(user=request.user)
        .exclude(category='')
        .values_list('category', flat=True)
        .distinct()
        .order_by('category')
    )
    return Response(list(categories))


# Recipe views
def _recipe_queryset(user):
    return Recipe.objects.filter(user=user).prefetch_related('recipe_ingredients__ingredient')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def recipe_list_create(request):
    """List the user's recipes or create one with its ingredient lines"""
    if request.method == 'GET':
        filterset = RecipeFilter(request.query_params, queryset=_recipe_queryset(request.user))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = RecipeSerializer(filterset.qs.order_by('name'), many=True, context={'request': request})
        return Response(serializer.data)

    serializer = RecipeSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        with transaction.atomic():
            recipe = serializer.save(user=request.user)
        create_audit_log(
            request=request, action='create', model_name='Recipe',
            object_id=recipe.id, object_name=recipe.name,
            changes={'ingredients': len(serializer.validated_data.get('recipe_ingredients', []))},
        )
        return Response(RecipeSerializer(recipe, context={'request': request}).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def recipe_detail(request, pk):
    """Retrieve, update or delete a recipe"""
    recipe = get_object_or_404(_recipe_queryset(request.user), pk=pk)

    if request.method == 'GET':
        serializer = RecipeSerializer(recipe, context={'request': request})
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        changes = diff_fields(recipe, request.data, RECIPE_AUDIT_FIELDS)
        serializer = RecipeSerializer(
            recipe, data=request.data, partial=request.method == 'PATCH', context={'request': request}
        )
        if serializer.is_valid():
            with transaction.atomic():
                recipe = serializer.save()
            if 'recipe_ingredients' in serializer.validated_data:
                changes['ingredients'] = {'new': len(serializer.validated_data['recipe_ingredients'])}
            create_audit_log(
                request=request, action='update', model_name='Recipe',
                object_id=recipe.id, object_name=recipe.name, changes=changes,
            )
            recipe = _recipe_queryset(request.user).get(pk=recipe.pk)
            return Response(RecipeSerializer(recipe, context={'request': request}).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if recipe.sales.exists():
            return Response(
                {'error': 'Recipe has recorded sales and cannot be deleted. Mark it inactive instead.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        recipe_id, recipe_name = recipe.id, recipe.name
        recipe.delete()
        create_audit_log(
            request=request, action='delete', model_name='Recipe',
            object_id=recipe_id, object_name=recipe_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recipe_cost(request, pk):
    """Full cost breakdown of a recipe with suggested selling prices"""
    recipe = get_object_or_404(Recipe.objects.select_related('user'), pk=pk, user=request.user)
    return Response(recipe_cost_breakdown(recipe))
