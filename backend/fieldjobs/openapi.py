"""Minimal deterministic OpenAPI spec builder.

Scope (purposefully narrow):
- Auth endpoints: /auth/login (POST), /auth/me (GET)
- Jobs: list, single GET & HEAD with caching headers, status history,
  status update and engineer assignment
- The Job schema carries the runtime transition table as ``x-transitions``
"""
from typing import Any, Dict

from .models.job import Job
from .services.transitions import JOB_FSM, TIMESTAMP_FIELDS

__all__ = ["build_openapi_spec"]


def caching_headers() -> Dict[str, Any]:
    return {
        "ETag": {"schema": {"type": "string"}},
        "Last-Modified": {"schema": {"type": "string"}},
        "X-Last-Modified-ISO": {"schema": {"type": "string"}},
    }


def _nullable_ts() -> Dict[str, Any]:
    return {"type": "string", "format": "date-time", "nullable": True}


def _job_schema() -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "id": {"type": "string", "format": "uuid"},
            "job_number": {"type": "string"},
            "agency_id": {"type": "integer", "nullable": True},
            "assigned_engineer_id": {"type": "integer", "nullable": True},
            "client_name": {"type": "string"},
            "job_type": {"type": "string", "nullable": True},
            "status": {"type": "string", "enum": list(Job.ALL_STATUSES)},
            "urgency": {"type": "string", "enum": list(Job.ALL_URGENCIES)},
            "assigned_at": _nullable_ts(),
            "accepted_at": _nullable_ts(),
            "started_at": _nullable_ts(),
            "completed_at": _nullable_ts(),
            "created_at": _nullable_ts(),
            "updated_at": _nullable_ts(),
        },
        "required": ["id", "job_number", "status"],
        "x-transitions": {s: JOB_FSM.allowed(s) for s in Job.ALL_STATUSES},
        "x-timestamp-fields": dict(TIMESTAMP_FIELDS),
    }


def _history_schema() -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "id": {"type": "string", "format": "uuid"},
            "job_id": {"type": "string", "format": "uuid"},
            "status": {"type": "string", "enum": list(Job.ALL_STATUSES)},
            "changed_by": {"type": "integer", "nullable": True},
            "location": {
                "type": "object",
                "nullable": True,
                "description": "GeoJSON point, coordinates are [lng, lat]",
                "properties": {
                    "type": {"type": "string", "enum": ["Point"]},
                    "coordinates": {"type": "array", "items": {"type": "number"}, "minItems": 2, "maxItems": 2},
                },
            },
            "notes": {"type": "string", "nullable": True},
            "created_at": {"type": "string", "format": "date-time"},
        },
        "required": ["id", "job_id", "status", "created_at"],
    }


def _status_update_result_schema() -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "job": {"$ref": "#/components/schemas/Job"},
            "status_history": {"type": "array", "items": {"$ref": "#/components/schemas/JobStatusHistory"}},
            "metadata": {
                "type": "object",
                "properties": {
                    "previous_status": {"type": "string"},
                    "new_status": {"type": "string"},
                    "transition_valid": {"type": "boolean"},
                    "timestamp_field_set": {"type": "string", "nullable": True},
                    "timestamp_recorded": {"type": "string", "nullable": True},
                    "location_recorded": {"type": "boolean"},
                    "history_recorded": {"type": "boolean"},
                    "broadcast_sent": {"type": "boolean"},
                },
            },
        },
        "required": ["job", "status_history", "metadata"],
    }


def _error_responses(*codes: str) -> Dict[str, Any]:
    refs = {
        "400": "BadRequest",
        "401": "Unauthorized",
        "403": "Forbidden",
        "404": "NotFound",
        "409": "Conflict",
        "500": "ServerError",
    }
    return {c: {"$ref": f"#/components/responses/{refs[c]}"} for c in codes}


def _job_id_param() -> Dict[str, Any]:
    return {"name": "job_id", "in": "path", "required": True, "schema": {"type": "string", "format": "uuid"}}


def build_openapi_spec() -> Dict[str, Any]:
    error_schema = {
        "type": "object",
        "properties": {
            "error": {
                "type": "object",
                "properties": {
                    "status": {"type": "integer"},
                    "code": {"type": "string"},
                    "title": {"type": "string"},
                    "detail": {"type": "string"},
                    "details": {"type": "object", "additionalProperties": {"type": "array", "items": {"type": "string"}}},
                    "timestamp": {"type": "string"},
                    "request_id": {"type": "string"},
                },
                "required": ["status", "code", "title", "detail"],
            }
        },
        "required": ["error"],
    }
    error_content = {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}
    components: Dict[str, Any] = {
        "schemas": {
            "Job": _job_schema(),
            "JobStatusHistory": _history_schema(),
            "StatusUpdateResult": _status_update_result_schema(),
            "Pagination": {
                "type": "object",
                "properties": {
                    "total": {"type": "integer"},
                    "limit": {"type": "integer"},
                    "offset": {"type": "integer"},
                    "returned": {"type": "integer"},
                },
                "required": ["total", "limit", "offset", "returned"],
            },
            "Error": error_schema,
        },
        "responses": {
            "BadRequest": {"description": "VALIDATION_ERROR, INVALID_ID or INVALID_TRANSITION", "content": error_content},
            "Unauthorized": {"description": "UNAUTHORIZED", "content": error_content},
            "Forbidden": {"description": "FORBIDDEN", "content": error_content},
            "NotFound": {"description": "NOT_FOUND", "content": error_content},
            "Conflict": {"description": "CONFLICT", "content": error_content},
            "ServerError": {"description": "DATABASE_ERROR or INTERNAL_ERROR", "content": error_content},
        },
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        "parameters": {
            "LimitParam": {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 50}},
            "OffsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer", "default": 0}},
            "SortJobsParam": {
                "name": "sort", "in": "query", "schema": {"type": "string"},
                "description": "Multi-field sort (job_number,status,urgency,updated_at,id). Prefix - for desc",
            },
        },
    }

    def list_response(item_ref: str) -> Dict[str, Any]:
        return {
            "description": "OK",
            "headers": caching_headers(),
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "data": {"type": "array", "items": {"$ref": item_ref}},
                            "pagination": {"$ref": "#/components/schemas/Pagination"},
                        },
                    }
                }
            },
        }

    paths: Dict[str, Any] = {
        "/auth/login": {"post": {"summary": "Login", "responses": {"200": {"description": "JWT issued"}} | _error_responses("400", "401")}},
        "/auth/me": {"get": {"summary": "Current user", "responses": {"200": {"description": "OK"}} | _error_responses("401")}},
        "/jobs": {
            "get": {
                "summary": "List jobs visible to the caller",
                "parameters": [
                    {"$ref": "#/components/parameters/LimitParam"},
                    {"$ref": "#/components/parameters/OffsetParam"},
                    {"$ref": "#/components/parameters/SortJobsParam"},
                    {"name": "status", "in": "query", "schema": {"type": "string", "enum": list(Job.ALL_STATUSES)}},
                    {"name": "urgency", "in": "query", "schema": {"type": "string", "enum": list(Job.ALL_URGENCIES)}},
                    {"name": "engineer_id", "in": "query", "schema": {"type": "integer"}},
                ],
                "responses": {"200": list_response("#/components/schemas/Job"), "304": {"description": "Not Modified"}}
                | _error_responses("400", "401", "403"),
                "x-required-permissions": ["JOB.READ"],
            },
        },
        "/jobs/{job_id}": {
            "get": {
                "summary": "Get job",
                "parameters": [_job_id_param()],
                "responses": {
                    "200": {
                        "description": "OK",
                        "headers": caching_headers(),
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Job"}}},
                    },
                    "304": {"description": "Not Modified"},
                } | _error_responses("400", "401", "403", "404"),
                "x-required-permissions": ["JOB.READ"],
            },
            "head": {
                "summary": "Job validators",
                "parameters": [_job_id_param()],
                "responses": {
                    "200": {"description": "Headers only", "headers": caching_headers()},
                    "304": {"description": "Not Modified"},
                } | _error_responses("404"),
                "x-required-permissions": ["JOB.READ"],
            },
        },
        "/jobs/{job_id}/history": {
            "get": {
                "summary": "Job status history, newest first",
                "parameters": [
                    _job_id_param(),
                    {"$ref": "#/components/parameters/LimitParam"},
                    {"$ref": "#/components/parameters/OffsetParam"},
                ],
                "responses": {"200": list_response("#/components/schemas/JobStatusHistory"), "304": {"description": "Not Modified"}}
                | _error_responses("400", "401", "403", "404"),
                "x-required-permissions": ["JOB.READ"],
            },
        },
        "/jobs/{job_id}/status": {
            "patch": {
                "summary": "Update job status",
                "parameters": [_job_id_param()],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "status": {"type": "string", "enum": list(Job.ALL_STATUSES)},
                                    "location": {
                                        "type": "object",
                                        "properties": {
                                            "lat": {"type": "number", "minimum": -90, "maximum": 90},
                                            "lng": {"type": "number", "minimum": -180, "maximum": 180},
                                        },
                                        "required": ["lat", "lng"],
                                    },
                                    "notes": {"type": "string"},
                                },
                                "required": ["status"],
                            }
                        }
                    },
                },
                "responses": {
                    "200": {"description": "OK", "content": {"application/json": {"schema": {"$ref": "#/components/schemas/StatusUpdateResult"}}}},
                } | _error_responses("400", "401", "403", "404", "409", "500"),
                "x-required-permissions": ["JOB.WRITE"],
            },
        },
        "/jobs/{job_id}/assign": {
            "post": {
                "summary": "Assign an engineer to a pending job",
                "parameters": [_job_id_param()],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {"engineer_id": {"type": "integer"}, "notes": {"type": "string"}},
                                "required": ["engineer_id"],
                            }
                        }
                    },
                },
                "responses": {
                    "200": {"description": "OK", "content": {"application/json": {"schema": {"$ref": "#/components/schemas/StatusUpdateResult"}}}},
                } | _error_responses("400", "401", "403", "404", "409", "500"),
                "x-required-permissions": ["JOB.ASSIGN"],
            },
        },
    }

    # Add operationIds & tags
    tag_desc: Dict[str, str] = {}
    for path, ops in paths.items():
        tag = path.split("/")[1].capitalize()
        for method, od in ops.items():
            rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
            od["operationId"] = f"auto_{method}_{rid}"
            od["tags"] = [tag]
        tag_desc[tag] = f"{tag} endpoints"

    return {
        "openapi": "3.0.3",
        "info": {"title": "Field Jobs API", "version": "0.1.0"},
        "paths": paths,
        "components": components,
        "security": [{"BearerAuth": []}],
        "tags": [{"name": n, "description": d} for n, d in sorted(tag_desc.items())],
    }
