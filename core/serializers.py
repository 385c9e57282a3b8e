# core/serializers.py - Base serializer for MongoEngine documents

from rest_framework import serializers

from .views import get_document_or_none


class DocumentSerializer(serializers.Serializer):
    """Plain DRF serializer that knows how to save one MongoEngine document type.

    Subclasses declare their fields explicitly and set `document`.
    """
    document = None

    id = serializers.CharField(read_only=True)

    def create(self, validated_data):
        instance = self.document(**validated_data)
        instance.save()
        return instance

    def update(self, instance, validated_data):
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance


class ReferenceIdField(serializers.CharField):
    """Accepts a document id and resolves it to the referenced document.

    Reads back as the referenced document's id.
    """

    def __init__(self, document, entity_name=None, **kwargs):
        self.document = document
        self.entity_name = entity_name or document.__name__
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        instance = get_document_or_none(self.document, value)
        if instance is None:
            raise serializers.ValidationError(f"{self.entity_name} not found.")
        return instance

    def to_representation(self, value):
        if value is None:
            return None
        return str(getattr(value, 'id', value))
