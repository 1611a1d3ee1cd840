"""
Destination database schema for notion-page-db.

The required property set is fixed. An optional JSON or YAML schema file can
replace the default schema used when provisioning a new database.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import yaml

from ..models import DatabaseSchema, PropertyDescriptor, SelectOption

REQUIRED_PROPERTIES: List[str] = [
    "Title",
    "Category",
    "Tags",
    "Summary",
    "Excerpt",
    "Mins Read",
    "Image",
    "R2ImageUrl",
    "Date Created",
    "Status",
    "Original Page",
    "Published",
]


def default_schema(name: str = "Content Database") -> DatabaseSchema:
    """
    Build the schema a new destination database is created with.

    Args:
        name: Title of the database

    Returns:
        DatabaseSchema covering every required property
    """
    return DatabaseSchema(
        name=name,
        properties={
            "Title": PropertyDescriptor(type="title"),
            "Category": PropertyDescriptor(type="select", options=[
                SelectOption(name="JavaScript", color="yellow"),
                SelectOption(name="Python", color="blue"),
                SelectOption(name="React", color="green"),
                SelectOption(name="TypeScript", color="purple"),
            ]),
            "Tags": PropertyDescriptor(type="multi_select", options=[]),
            "Summary": PropertyDescriptor(type="rich_text"),
            "Excerpt": PropertyDescriptor(type="rich_text"),
            "Mins Read": PropertyDescriptor(type="number", format="number"),
            "Image": PropertyDescriptor(type="url"),
            "R2ImageUrl": PropertyDescriptor(type="url"),
            "Date Created": PropertyDescriptor(type="date"),
            "Status": PropertyDescriptor(type="select", options=[
                SelectOption(name="Draft", color="gray"),
                SelectOption(name="Ready", color="green"),
                SelectOption(name="Review", color="yellow"),
                SelectOption(name="Published", color="blue"),
            ]),
            "Original Page": PropertyDescriptor(type="url"),
            "Published": PropertyDescriptor(type="checkbox"),
        },
    )


def load_schema_config(path: str = "config/database-schema.json",
                       name: str = "Content Database") -> Optional[DatabaseSchema]:
    """
    Load a schema override file.

    The file holds either a full schema (`name` and `properties`) or just the
    property mapping.

    Args:
        path: Path to a JSON or YAML file
        name: Database name used when the file does not give one

    Returns:
        The schema, or None when the file is missing or invalid
    """
    schema_path = Path(path)
    if not schema_path.exists():
        return None

    try:
        with open(schema_path, 'r', encoding='utf-8') as f:
            if schema_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        if "properties" not in data:
            data = {"properties": data}
        data.setdefault("name", name)
        schema = DatabaseSchema(**data)
        logging.info(f"Loaded database schema from {schema_path}")
        return schema

    except Exception as e:
        logging.error(f"Error loading schema config from {schema_path}: {e}")
        return None
