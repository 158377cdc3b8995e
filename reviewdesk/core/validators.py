"""Task validation utilities."""

import json
from typing import Any, Dict

from reviewdesk.core.response import ValidationResult


class TaskValidator:
    """Task input validator."""
    
    @classmethod
    def validate_object_id(cls, task_id: str) -> bool:
        """Check MongoDB ObjectId format (24 character hex string)."""
        if not task_id or not isinstance(task_id, str):
            return False
            
        task_id = task_id.strip()
        
        if len(task_id) == 24:
            try:
                int(task_id, 16)
                return True
            except ValueError:
                return False
        
        return False
    
    @classmethod
    def validate_tests_json(cls, tests_json: str) -> ValidationResult:
        """tests_json must parse as a JSON document when provided."""
        result = ValidationResult(is_valid=True)
        if not tests_json:
            return result
        try:
            json.loads(tests_json)
        except ValueError as e:
            result.add_error(f"tests_json is not valid JSON: {e}")
        return result
    
    @classmethod
    def validate_task_input(cls, task_data: Dict[str, Any]) -> ValidationResult:
        """Checks beyond field constraints on create/update payloads."""
        result = ValidationResult(is_valid=True)
        
        for field in ("title", "instruction", "categories"):
            if field in task_data and task_data[field] is not None and not task_data[field].strip():
                result.add_error(f"{field} cannot be blank")
        
        tests_json = task_data.get("tests_json")
        if tests_json:
            json_result = cls.validate_tests_json(tests_json)
            if not json_result.is_valid:
                result.errors.extend(json_result.errors)
                result.is_valid = False
        
        return result
    
    @classmethod
    def validate_for_submission(cls, task_data: Dict[str, Any]) -> ValidationResult:
        """A task needs a title and an instruction before it can be reviewed."""
        result = ValidationResult(is_valid=True)
        
        if not (task_data.get("title") or "").strip():
            result.add_error("title is required")
        if not (task_data.get("instruction") or "").strip():
            result.add_error("instruction is required")
        
        return result
