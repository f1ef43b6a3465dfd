"""Failure modes of a running chain."""


class NumericDegeneracyError(FloatingPointError):
    """Raised when a draw or a normalization produces a non-finite value.

    The chain is not recovered; the error names the sweep and either the
    block pair or the node at which sampling broke down.
    """

    def __init__(
        self,
        message: str,
        sweep: int | None = None,
        block: tuple[int, int] | None = None,
        node: int | None = None,
    ) -> None:
        where = []
        if sweep is not None:
            where.append(f"sweep={sweep}")
        if block is not None:
            where.append(f"block={block}")
        if node is not None:
            where.append(f"node={node}")
        if where:
            message = f"{message} ({', '.join(where)})"
        super().__init__(message)
        self.sweep = sweep
        self.block = block
        self.node = node
