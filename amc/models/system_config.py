# amc/models/system_config.py

import json

from django.db import models


class SystemConfig(models.Model):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    DATA_TYPE_CHOICES = [
        (STRING, "String"),
        (NUMBER, "Number"),
        (BOOLEAN, "Boolean"),
        (JSON, "JSON"),
    ]

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(help_text="Stored as text, interpreted via data_type")
    data_type = models.CharField(max_length=10, choices=DATA_TYPE_CHOICES, default=STRING)
    category = models.CharField(max_length=50, default="application")
    description = models.CharField(max_length=255, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "system_config"
        ordering = ["category", "key"]

    def __str__(self):
        return self.key

    @property
    def typed_value(self):
        if self.data_type == self.NUMBER:
            number = float(self.value)
            return int(number) if number.is_integer() else number
        if self.data_type == self.BOOLEAN:
            return self.value.strip().lower() in ("true", "1", "yes")
        if self.data_type == self.JSON:
            return json.loads(self.value)
        return self.value
