"""JSON schema for configuration structure validation."""

from __future__ import annotations

CONFIG_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "CPU Scheduling Simulation Config",
    "type": "object",
    "required": ["version", "processes", "scheduler"],
    "properties": {
        "version": {"type": "string"},
        "resource_count": {"type": "integer", "minimum": 0},
        "max_priority": {"type": "integer", "minimum": 0},
        "processes": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/$defs/Process"},
        },
        "scheduler": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "params": {
                    "type": "object",
                    "default": {},
                    "properties": {
                        "event_id_mode": {
                            "type": "string",
                            "enum": ["deterministic", "random", "seeded_random"],
                        },
                    },
                },
            },
            "additionalProperties": False,
        },
        "sim": {
            "type": "object",
            "properties": {
                "duration": {"type": "integer", "exclusiveMinimum": 0},
                "seed": {"type": "integer"},
                "verify": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
    },
    "$defs": {
        "Process": {
            "type": "object",
            "required": ["pid", "lifespan"],
            "properties": {
                "pid": {"type": "integer", "minimum": 0},
                "arrival": {"type": "integer", "minimum": 0},
                "lifespan": {"type": "integer", "minimum": 1},
                "priority": {"type": "integer", "minimum": 0},
                "acquires": {
                    "type": "array",
                    "items": {"$ref": "#/$defs/Acquire"},
                    "default": [],
                },
            },
            "additionalProperties": False,
        },
        "Acquire": {
            "type": "object",
            "required": ["resource", "at", "duration"],
            "properties": {
                "resource": {"type": "integer", "minimum": 0},
                "at": {"type": "integer", "minimum": 0},
                "duration": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}
