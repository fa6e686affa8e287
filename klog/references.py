"""References to Kubernetes objects for use in structured log entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, TextIO, runtime_checkable

_NULL_TOKEN = "null"


@runtime_checkable
class KMetadata(Protocol):
    """The subset of object metadata needed to reference an object."""

    def get_name(self) -> str:
        """Return the object's name."""

    def get_namespace(self) -> str:
        """Return the object's namespace, empty for cluster-scoped objects."""


@dataclass(frozen=True)
class ObjectRef:
    """A reference to an object by name and optional namespace."""

    name: str = ""
    namespace: str = ""

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def write_text(self, out: TextIO) -> None:
        """Write the reference as a quoted string."""
        out.write(f'"{self}"')

    def marshal_log(self) -> dict:
        """Return the reference as plain data for structured output."""
        data = {"name": self.name}
        if self.namespace:
            data["namespace"] = self.namespace
        return data


def kobj(obj: Optional[KMetadata]) -> ObjectRef:
    """Return an ObjectRef for obj, or an empty one for None."""
    if obj is None:
        return ObjectRef()
    return ObjectRef(name=obj.get_name(), namespace=obj.get_namespace())


def kref(namespace: str, name: str) -> ObjectRef:
    """Return an ObjectRef from a namespace and a name."""
    return ObjectRef(name=name, namespace=namespace)


def _is_slice(arg: Any) -> bool:
    return isinstance(arg, (list, tuple))


def kobjs(arg: Any) -> Optional[list[ObjectRef]]:
    """Return ObjectRefs for a sequence of objects.

    Returns None if arg is not a list or tuple, or if any item lacks
    object metadata. Prefer kobj_slice, which defers the work.
    """
    if not _is_slice(arg):
        return None
    refs = []
    for item in arg:
        if not isinstance(item, KMetadata):
            return None
        refs.append(kobj(item))
    return refs


def _slice_error(arg: Any) -> str:
    return f"<KObjSlice needs a slice, got type {type(arg).__name__}>"


def _item_error(item: Any) -> str:
    return (
        "<KObjSlice needs a slice of values implementing KMetadata, "
        f"got type {type(item).__name__}>"
    )


@dataclass(frozen=True)
class KObjSlice:
    """Lazily converts a sequence of objects into ObjectRefs when logged."""

    arg: Any

    def _process(self) -> tuple[Optional[list], str]:
        if self.arg is None:
            return None, ""
        if not _is_slice(self.arg):
            return None, _slice_error(self.arg)
        refs: list = []
        for item in self.arg:
            if item is None:
                refs.append(None)
            elif isinstance(item, KMetadata):
                refs.append(kobj(item))
            else:
                return None, _item_error(item)
        return refs, ""

    def __str__(self) -> str:
        refs, err = self._process()
        if err:
            return err
        shown = ("<nil>" if ref is None else str(ref) for ref in refs or ())
        return "[" + " ".join(shown) + "]"

    def marshal_log(self) -> Any:
        """Return the list of references, or an error string."""
        refs, err = self._process()
        if err:
            return err
        return refs

    def write_text(self, out: TextIO) -> None:
        """Write the references as a bracketed list of quoted strings."""
        if self.arg is None:
            out.write(_NULL_TOKEN)
            return
        if not _is_slice(self.arg):
            out.write(f'"{_slice_error(self.arg)}"')
            return
        out.write("[")
        try:
            for index, item in enumerate(self.arg):
                if index:
                    out.write(",")
                if item is None:
                    out.write(_NULL_TOKEN)
                elif isinstance(item, KMetadata):
                    kobj(item).write_text(out)
                else:
                    out.write(f'"{_item_error(item)}"')
                    return
        finally:
            out.write("]")


def kobj_slice(arg: Any) -> KObjSlice:
    """Wrap a sequence of objects so that it is logged as ObjectRefs."""
    return KObjSlice(arg)