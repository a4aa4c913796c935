"""Address-space node descriptors produced by browse steps."""

from dataclasses import dataclass

from asyncua import ua

# Reference kinds followed by the crawler, in traversal order
ORGANIZES = ua.ObjectIds.Organizes
HAS_COMPONENT = ua.ObjectIds.HasComponent
CRAWL_REFERENCE_TYPES: tuple[int, ...] = (ORGANIZES, HAS_COMPONENT)

# Node classes that carry live values worth subscribing to. Some servers
# expose data points without declaring them Variable.
SUBSCRIBABLE_NODE_CLASSES = frozenset({"Variable", "Unspecified"})


@dataclass(frozen=True)
class RemoteNode:
    """A node returned by a browse step.

    Attributes:
        node_id: OPC-UA NodeId string (e.g. "ns=2;i=1234")
        display_name: LocalizedText as string, None when the server sent none
        node_class: Node class name ("Object", "Variable", "Unspecified", ...)
        browse_name: QualifiedName name, if any
    """

    node_id: str
    display_name: str | None
    node_class: str
    browse_name: str | None = None

    @property
    def is_subscribable(self) -> bool:
        """True if the node's class carries a monitorable value."""
        return self.node_class in SUBSCRIBABLE_NODE_CLASSES

    @classmethod
    def from_reference(cls, ref: ua.ReferenceDescription) -> "RemoteNode":
        """Build a RemoteNode from an asyncua ReferenceDescription."""
        display_name = ref.DisplayName.Text if ref.DisplayName is not None else None
        browse_name = ref.BrowseName.Name if ref.BrowseName is not None else None
        node_class = ua.NodeClass(ref.NodeClass).name
        return cls(
            node_id=ref.NodeId.to_string(),
            display_name=display_name or None,
            node_class=node_class,
            browse_name=browse_name,
        )
