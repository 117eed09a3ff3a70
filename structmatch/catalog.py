"""
structmatch/catalog.py
══════════════════════

Matchers for the conventional fields of Kubernetes and Crossplane API
types.

Every entry is data: a role key, the field name it expects and (for all but
``items``) the suffix the field's qualified type must carry.  Matchers are
built from ``is_type_named`` / ``is_named`` and nothing else, so adding a
role is a one-line change to ``ROLES``.

    >>> from structmatch.catalog import is_object_meta, is_spec
    >>> from structmatch.matchers import has
    >>> has(some_type, is_object_meta(), is_spec())      # doctest: +SKIP
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from structmatch.errors import UnknownRoleError
from structmatch.matchers import (
    Matcher,
    TypeMatchMode,
    is_named,
    is_type_named,
)

logger = logging.getLogger(__name__)

# Field names.
NAME_TYPE_META = "TypeMeta"
NAME_OBJECT_META = "ObjectMeta"
NAME_LIST_META = "ListMeta"
NAME_SPEC = "Spec"
NAME_SPEC_TEMPLATE = "SpecTemplate"
NAME_STATUS = "Status"
NAME_RESOURCE_SPEC = "ResourceSpec"
NAME_RESOURCE_STATUS = "ResourceStatus"
NAME_RESOURCE_CLAIM_SPEC = "ResourceClaimSpec"
NAME_NON_PORTABLE_CLASS_SPEC_TEMPLATE = "NonPortableClassSpecTemplate"
NAME_PORTABLE_CLASS = "PortableClass"
NAME_ITEMS = "Items"

_META_V1 = "k8s.io/apimachinery/pkg/apis/meta/v1"
_CORE_V1ALPHA1 = "github.com/crossplaneio/crossplane-runtime/apis/core/v1alpha1"

# Field type suffixes.
TYPE_SUFFIX_TYPE_META = f"{_META_V1}.TypeMeta"
TYPE_SUFFIX_OBJECT_META = f"{_META_V1}.ObjectMeta"
TYPE_SUFFIX_LIST_META = f"{_META_V1}.ListMeta"
TYPE_SUFFIX_SPEC = NAME_SPEC
TYPE_SUFFIX_SPEC_TEMPLATE = NAME_SPEC_TEMPLATE
TYPE_SUFFIX_STATUS = NAME_STATUS
TYPE_SUFFIX_RESOURCE_SPEC = f"{_CORE_V1ALPHA1}.ResourceSpec"
TYPE_SUFFIX_RESOURCE_STATUS = f"{_CORE_V1ALPHA1}.ResourceStatus"
TYPE_SUFFIX_RESOURCE_CLAIM_SPEC = f"{_CORE_V1ALPHA1}.ResourceClaimSpec"
TYPE_SUFFIX_RESOURCE_CLAIM_STATUS = f"{_CORE_V1ALPHA1}.ResourceClaimStatus"
TYPE_SUFFIX_NON_PORTABLE_CLASS_SPEC_TEMPLATE = (
    f"{_CORE_V1ALPHA1}.NonPortableClassSpecTemplate"
)
TYPE_SUFFIX_PORTABLE_CLASS = f"{_CORE_V1ALPHA1}.PortableClass"


@dataclass(frozen=True)
class FieldRole:
    """
    A conventional structural role a field can play.

    Attributes
    ----------
    role        : Catalog key (e.g. ``"object-meta"``)
    field_name  : Exact field name the role expects
    type_suffix : Required qualified-type suffix; ``None`` means the role
                  is recognised by name alone
    summary     : One-line human description
    """
    role: str
    field_name: str
    type_suffix: Optional[str]
    summary: str = ""

    def matcher(self, mode: TypeMatchMode = TypeMatchMode.SUFFIX) -> Matcher:
        if self.type_suffix is None:
            return is_named(self.field_name)
        return is_type_named(self.type_suffix, self.field_name, mode)


ROLES: Dict[str, FieldRole] = {
    r.role: r
    for r in (
        FieldRole("type-meta", NAME_TYPE_META, TYPE_SUFFIX_TYPE_META,
                  "Kubernetes type metadata"),
        FieldRole("object-meta", NAME_OBJECT_META, TYPE_SUFFIX_OBJECT_META,
                  "Kubernetes object metadata"),
        FieldRole("list-meta", NAME_LIST_META, TYPE_SUFFIX_LIST_META,
                  "Kubernetes list metadata"),
        FieldRole("spec", NAME_SPEC, TYPE_SUFFIX_SPEC,
                  "Kubernetes resource spec"),
        FieldRole("spec-template", NAME_SPEC_TEMPLATE,
                  TYPE_SUFFIX_SPEC_TEMPLATE,
                  "Crossplane resource class spec template"),
        FieldRole("status", NAME_STATUS, TYPE_SUFFIX_STATUS,
                  "Kubernetes resource status"),
        FieldRole("resource-spec", NAME_RESOURCE_SPEC,
                  TYPE_SUFFIX_RESOURCE_SPEC,
                  "Crossplane managed resource spec"),
        FieldRole("resource-status", NAME_RESOURCE_STATUS,
                  TYPE_SUFFIX_RESOURCE_STATUS,
                  "Crossplane managed resource status"),
        FieldRole("resource-claim-spec", NAME_RESOURCE_CLAIM_SPEC,
                  TYPE_SUFFIX_RESOURCE_CLAIM_SPEC,
                  "Crossplane resource claim spec"),
        FieldRole("resource-claim-status", NAME_STATUS,
                  TYPE_SUFFIX_RESOURCE_CLAIM_STATUS,
                  "Crossplane resource claim status"),
        FieldRole("non-portable-class-spec-template",
                  NAME_NON_PORTABLE_CLASS_SPEC_TEMPLATE,
                  TYPE_SUFFIX_NON_PORTABLE_CLASS_SPEC_TEMPLATE,
                  "Crossplane non-portable resource class spec template"),
        FieldRole("portable-class", NAME_PORTABLE_CLASS,
                  TYPE_SUFFIX_PORTABLE_CLASS,
                  "Crossplane portable resource class"),
        FieldRole("items", NAME_ITEMS, None,
                  "Items of a Kubernetes list"),
    )
}


def role_names() -> List[str]:
    return list(ROLES)


def get_role(role: str) -> FieldRole:
    try:
        return ROLES[role]
    except KeyError:
        raise UnknownRoleError(role, role_names()) from None


def role_matcher(
    role: str, mode: TypeMatchMode = TypeMatchMode.SUFFIX
) -> Matcher:
    """Return the matcher for catalog *role*."""
    logger.debug("building matcher for role %s (%s)", role, mode.value)
    return get_role(role).matcher(mode)


def build_catalog(
    mode: TypeMatchMode = TypeMatchMode.SUFFIX,
) -> Dict[str, Matcher]:
    """Return ``{role: matcher}`` for every catalog role."""
    return {name: r.matcher(mode) for name, r in ROLES.items()}


# Named accessors, one per role.

def is_type_meta() -> Matcher:
    return role_matcher("type-meta")


def is_object_meta() -> Matcher:
    return role_matcher("object-meta")


def is_list_meta() -> Matcher:
    return role_matcher("list-meta")


def is_spec() -> Matcher:
    return role_matcher("spec")


def is_spec_template() -> Matcher:
    return role_matcher("spec-template")


def is_status() -> Matcher:
    return role_matcher("status")


def is_resource_spec() -> Matcher:
    return role_matcher("resource-spec")


def is_resource_status() -> Matcher:
    return role_matcher("resource-status")


def is_resource_claim_spec() -> Matcher:
    return role_matcher("resource-claim-spec")


def is_resource_claim_status() -> Matcher:
    return role_matcher("resource-claim-status")


def is_non_portable_class_spec_template() -> Matcher:
    return role_matcher("non-portable-class-spec-template")


def is_portable_class() -> Matcher:
    return role_matcher("portable-class")


def is_items() -> Matcher:
    return role_matcher("items")
