"""Tag comparison helpers."""

from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

TagsLike = Union[Mapping[str, str], Iterable[Mapping[str, str]], None]


def tags_to_dict(tags: TagsLike) -> Dict[str, str]:
    """
    Normalize tags into a plain dict.

    Accepts a dict or the AWS list shape ``[{'Key': ..., 'Value': ...}]``
    returned by EC2, ELBv2 and launch template describe calls.
    """
    if not tags:
        return {}
    if isinstance(tags, Mapping):
        return dict(tags)
    return {tag['Key']: tag.get('Value', '') for tag in tags}


def missing_tags(actual: TagsLike, required: Mapping[str, str]) -> Dict[str, Tuple[str, Optional[str]]]:
    """
    Required tags that are absent or carry a different value.

    Returns:
        Mapping of tag key to (expected, actual) where actual is None when absent
    """
    actual_map = tags_to_dict(actual)
    return {
        key: (value, actual_map.get(key))
        for key, value in required.items()
        if actual_map.get(key) != value
    }


def has_required_tags(actual: TagsLike, required: Mapping[str, str]) -> bool:
    """True iff every required key is present in actual with exactly the required value."""
    return not missing_tags(actual, required)


def required_tags(environment: str, project_name: str, managed_by: Optional[str] = "terraform") -> Dict[str, str]:
    """Standard tag set every module applies to its resources."""
    tags = {
        "Environment": environment,
        "Project": project_name,
    }
    if managed_by:
        tags["ManagedBy"] = managed_by
    return tags


def describe_tag_mismatch(resource: str, actual: TagsLike, required: Mapping[str, str]) -> str:
    """Human-readable assertion message for a tag mismatch."""
    parts = []
    for key, (expected, found) in sorted(missing_tags(actual, required).items()):
        if found is None:
            parts.append(f"missing tag {key} (expected '{expected}')")
        else:
            parts.append(f"tag {key}: expected '{expected}', got '{found}'")
    return f"{resource}: " + "; ".join(parts)
