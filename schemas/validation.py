from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar
from pydantic import BaseModel, ValidationError

ModelT = TypeVar('ModelT', bound=BaseModel)


@dataclass
class ValidationResult(Generic[ModelT]):
    """Outcome of validating a request payload: a parsed value or a list of errors."""
    value: Optional[ModelT] = None
    errors: List[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def format_errors(errors: Sequence[dict]) -> List[dict]:
    formatted = []
    for error in errors:
        # FastAPI prefixes locations with the request part ("body", "query")
        loc = [str(part) for part in error.get('loc', ()) if part not in ('body', 'query', 'path')]
        formatted.append({
            'field': '.'.join(loc),
            'msg': error.get('msg', ''),
            'type': error.get('type', ''),
        })
    return formatted


def validate_payload(model: Type[ModelT], payload: Any) -> ValidationResult[ModelT]:
    try:
        return ValidationResult(value=model.model_validate(payload))
    except ValidationError as exc:
        return ValidationResult(errors=format_errors(exc.errors()))
