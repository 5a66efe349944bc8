# Contains the pass that numbers every object in the document
from .tree import DocumentTree, NodeKind

ROOT_TABLE = "root"


class IdentifierAssigner:
    """
    Gives every object node a unique id in document pre-order, starting at 1,
    and records how each object and array hangs off its parent.
    """

    def __init__(self, tree: DocumentTree):
        self.tree = tree

    def assign(self) -> int:
        """
        Number the whole tree.

        Returns:
            int: the next unused id (1 for an empty tree)
        """
        if self.tree.root == -1:
            return 1

        root = self.tree.node(self.tree.root)
        if root.kind == NodeKind.OBJECT:
            return self._assign_object(self.tree.root, 1)
        elif root.kind == NodeKind.ARRAY:
            # A top-level array has no owning object; its elements are rows of the root table
            root.parent_key = ROOT_TABLE
            return self._assign_array(self.tree.root, 1)
        # Scalars at the root carry no identity
        return 1

    def _assign_object(self, index, next_id):
        """Assign an id to this object and everything nested below it."""
        node = self.tree.expect(index, NodeKind.OBJECT)
        node.id = next_id
        next_id += 1

        # Children refer to this object by its position name until tables exist
        position = ROOT_TABLE if node.parent_id == -1 and node.array_index == -1 else node.parent_key

        for key, child_index in node.pairs:
            child = self.tree.node(child_index)
            if child.kind == NodeKind.OBJECT:
                child.parent_id = node.id
                child.parent_table = position
                child.parent_key = key
                next_id = self._assign_object(child_index, next_id)
            elif child.kind == NodeKind.ARRAY:
                child.parent_id = node.id
                child.parent_table = position
                child.parent_key = key
                next_id = self._assign_array(child_index, next_id)

        return next_id

    def _assign_array(self, index, next_id):
        """Recurse into an array, but only when it holds objects exclusively."""
        array = self.tree.expect(index, NodeKind.ARRAY)
        if not self.tree.is_object_array(index):
            return next_id

        for position, element_index in enumerate(array.elements):
            element = self.tree.node(element_index)
            element.parent_id = array.parent_id
            element.parent_table = array.parent_table
            element.parent_key = array.parent_key or ROOT_TABLE
            element.array_index = position
            next_id = self._assign_object(element_index, next_id)

        return next_id
