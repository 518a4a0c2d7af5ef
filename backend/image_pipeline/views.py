"""
API views for the vocabulary image pipeline.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from image_pipeline.serializers import (
    FindBestImageSerializer,
    FindBetterImageSerializer,
    ValidateCategorySerializer,
    ValidateImageSerializer,
)
from image_pipeline.types import validation_result_to_dict
from image_pipeline.pipelines.resolver import find_best_image_json, get_image_resolver
from image_pipeline.pipelines.category_validation import get_category_validator

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "OpenAI API key is not configured. Set OPENAI_API_KEY to enable image validation."


def _missing_key_response():
    return Response({'message': MISSING_KEY_MESSAGE}, status=status.HTTP_400_BAD_REQUEST)


def _validator_available() -> bool:
    return get_category_validator().validator.available


class FindBestImageView(APIView):
    """
    POST /api/find-best-image

    Request:
    {
        "category": "animals",
        "word": "cat",
        "translation": "Katze"
    }

    Response:
    {
        "bestImageUrl": "...",
        "confidence": 0.95,
        "reasoning": "...",
        "logicCheck": true,
        "source": "curated"
    }
    """

    def post(self, request):
        serializer = FindBestImageSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'message': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        try:
            payload = find_best_image_json(data['category'], data['word'], data['translation'])
        except Exception as e:
            logger.error(f"find-best-image failed for '{data['word']}': {e}", exc_info=True)
            return Response(
                {'message': 'Fehler beim Finden eines passenden Bildes'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(payload)


class ValidateImageView(APIView):
    """
    POST /api/validate-image

    Body: {imageUrl, englishWord, germanTranslation, category}
    Returns: {isValid, confidence, reasoning, childFriendly, suggestedReplacement?}
    """

    def post(self, request):
        serializer = ValidateImageSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'message': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        if not _validator_available():
            return _missing_key_response()
        data = serializer.validated_data

        validation = get_category_validator().validator.validate_image(
            data['imageUrl'],
            data['englishWord'],
            data['germanTranslation'],
            data['category'],
        )
        return Response(validation_result_to_dict(validation))


class ValidateCategoryView(APIView):
    """
    POST /api/validate-category

    Body: {vocabularyItems: [{word, translation, imageUrl}], category}
    Returns: [{word, validation, newImageUrl?}]
    """

    def post(self, request):
        serializer = ValidateCategorySerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'message': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        if not _validator_available():
            return _missing_key_response()

        try:
            results = get_category_validator().validate_category(
                serializer.vocabulary_items(),
                serializer.validated_data['category'],
            )
        except Exception as e:
            logger.error(f"Category validation failed: {e}", exc_info=True)
            return Response(
                {'message': 'Fehler bei der Kategorie-Validierung', 'error': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(results)


class FindBetterImageView(APIView):
    """
    POST /api/find-better-image

    Body: {englishWord, germanTranslation, category}
    Returns: {imageUrl, validation} or 404 when nothing passes validation
    """

    def post(self, request):
        serializer = FindBetterImageSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'message': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        if not _validator_available():
            return _missing_key_response()
        data = serializer.validated_data

        try:
            found = get_category_validator().find_validated_image(
                data['englishWord'],
                data['germanTranslation'],
                data['category'],
            )
        except Exception as e:
            logger.error(f"find-better-image failed for '{data['englishWord']}': {e}", exc_info=True)
            return Response(
                {'message': 'Fehler bei der Bildsuche'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if found is None:
            return Response(
                {'message': f"Kein passendes Bild für '{data['englishWord']}' gefunden"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({
            'imageUrl': found['imageUrl'],
            'validation': validation_result_to_dict(found['validation']),
        })


class ValidateFamilyCategoryView(APIView):
    """
    POST /api/validate-family-category

    Validates the built-in family vocabulary and re-resolves weak images.
    """

    def post(self, request):
        if not _validator_available():
            return _missing_key_response()
        try:
            report = get_category_validator().validate_family_category()
        except Exception as e:
            logger.error(f"Family category validation failed: {e}", exc_info=True)
            return Response(
                {'message': 'Fehler bei Familie-Kategorie Validierung', 'error': str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(report)


class HealthView(APIView):
    """
    GET /api/image-pipeline/health

    Reports which pipeline steps are configured.
    """

    def get(self, request):
        resolver = get_image_resolver()
        health = {
            'ok': True,
            'cached_words': len(resolver.cache),
            'steps': {},
        }
        for strategy in resolver.strategies:
            step = {'available': True}
            generator = getattr(strategy, 'generator', None)
            if generator is not None:
                step['available'] = generator.available
            chain = getattr(strategy, 'chain', None)
            if chain is not None:
                step['providers'] = {p.name: p.available for p in chain.providers}
                step['available'] = any(step['providers'].values())
            health['steps'][strategy.name] = step
        health['steps']['validation'] = {'available': _validator_available()}
        return Response(health)
