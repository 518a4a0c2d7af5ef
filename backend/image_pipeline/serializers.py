"""DRF serializers for the image pipeline request bodies."""
from rest_framework import serializers

from image_pipeline.types import VocabularyItem


class FindBestImageSerializer(serializers.Serializer):
    category = serializers.CharField(allow_blank=True)
    word = serializers.CharField()
    translation = serializers.CharField(allow_blank=True)


class ValidateImageSerializer(serializers.Serializer):
    imageUrl = serializers.CharField()
    englishWord = serializers.CharField()
    germanTranslation = serializers.CharField(allow_blank=True)
    category = serializers.CharField(allow_blank=True)


class FindBetterImageSerializer(serializers.Serializer):
    englishWord = serializers.CharField()
    germanTranslation = serializers.CharField(allow_blank=True)
    category = serializers.CharField(allow_blank=True)


class VocabularyItemSerializer(serializers.Serializer):
    """Word with the image currently shown for it."""
    word = serializers.CharField()
    translation = serializers.CharField(allow_blank=True)
    imageUrl = serializers.CharField()


class ValidateCategorySerializer(serializers.Serializer):
    vocabularyItems = VocabularyItemSerializer(many=True)
    category = serializers.CharField(allow_blank=True)

    def vocabulary_items(self):
        return [
            VocabularyItem(word=d['word'], translation=d['translation'], image_url=d['imageUrl'])
            for d in self.validated_data['vocabularyItems']
        ]
