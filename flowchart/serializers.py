# flowchart/serializers.py
from rest_framework import serializers


class ConvertRequestSerializer(serializers.Serializer):
    algorithmText = serializers.CharField(trim_whitespace=True)


class SubmitRequestSerializer(serializers.Serializer):
    # пусто → берём текст, который уже лежит в store
    algorithmText = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class RenderErrorSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default="")


class RequestStateSerializer(serializers.Serializer):
    status = serializers.SerializerMethodField()
    isLoading = serializers.BooleanField(source="is_loading")
    algorithmText = serializers.CharField(source="algorithm_text")
    mermaidCode = serializers.CharField(source="diagram_source")
    error = serializers.CharField(allow_null=True)
    fallback = serializers.BooleanField()

    def get_status(self, obj):
        return obj.status.value
