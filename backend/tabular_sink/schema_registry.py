"""
Schema Registry

Named, versionable submission layouts. Request handling looks schemas up here
instead of hard-coding column positions.
"""

from typing import Dict, Iterable, List, Optional

from export_shared.exceptions import UnknownSchema

from .models import ColumnClass, SchemaField, SubmissionSchema

USER_DATA_SCHEMA = SubmissionSchema(
    name="user-data",
    fields=(
        SchemaField(key="username", label="Username"),
        SchemaField(key="email", label="Email"),
        SchemaField(key="value1", label="Value1", required=False),
        SchemaField(key="value2", label="Value2", required=False),
    ),
)

SURVEY_FEEDBACK_SCHEMA = SubmissionSchema(
    name="survey-feedback",
    fields=(
        SchemaField(key="age", label="Age"),
        SchemaField(key="comments", label="Further comments", column_class=ColumnClass.WRAPPED),
    ),
)


class SchemaRegistry:
    def __init__(self, schemas: Optional[Iterable[SubmissionSchema]] = None):
        self._schemas: Dict[str, SubmissionSchema] = {}
        for schema in schemas or []:
            self.register(schema)

    def register(self, schema: SubmissionSchema, *, replace: bool = False) -> SubmissionSchema:
        """
        Add a schema under its name

        A registered name can only be reused with `replace=True` and a higher
        version, so a running layout is never swapped for an older one.
        """
        current = self._schemas.get(schema.name)
        if current is not None:
            if not replace:
                raise ValueError(f"Schema already registered: {schema.name}")
            if schema.version <= current.version:
                raise ValueError(
                    f"Schema '{schema.name}' v{schema.version} does not supersede v{current.version}"
                )
        self._schemas[schema.name] = schema
        return schema

    def get(self, name: str) -> SubmissionSchema:
        try:
            return self._schemas[name]
        except KeyError:
            raise UnknownSchema(name) from None

    def names(self) -> List[str]:
        return sorted(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)


def default_registry() -> SchemaRegistry:
    return SchemaRegistry([USER_DATA_SCHEMA, SURVEY_FEEDBACK_SCHEMA])
