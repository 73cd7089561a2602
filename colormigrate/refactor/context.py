"""Context-sensitivity analysis.

Decides whether the scope around a node can supply the runtime handle
(``BuildContext`` by default) that a rewritten theme lookup needs. The
decision is made at the nearest enclosing method, function or constructor:

    method       static                          -> REQUIRES_MANUAL
                 render entry point               -> AVAILABLE
                 declares a handle parameter      -> AVAILABLE
                 inside a UI class                -> CAN_INJECT
                 otherwise                        -> REQUIRES_MANUAL
    function     declares a handle parameter      -> AVAILABLE
                 has a body                       -> CAN_INJECT
                 otherwise                        -> REQUIRES_MANUAL
    constructor  const                            -> UNAVAILABLE
                 declares a handle parameter      -> AVAILABLE
                 otherwise                        -> REQUIRES_MANUAL
    none (field initializer, top level)           -> UNAVAILABLE
"""

from colormigrate.profile import RewriteProfile
from colormigrate.refactor.models import ContextAvailability
from colormigrate.syntax import DECLARATION_KINDS, NodeKind, SyntaxNode


class ContextAnalyzer:
    """Four-state handle availability for a syntax node."""

    def __init__(self, profile: RewriteProfile | None = None):
        self.profile = profile or RewriteProfile()

    def analyze(self, node: SyntaxNode) -> ContextAvailability:
        declaration = self.enclosing_declaration(node)
        if declaration is None:
            return ContextAvailability.UNAVAILABLE
        if declaration.kind is NodeKind.METHOD:
            return self._analyze_method(declaration)
        if declaration.kind is NodeKind.FUNCTION:
            return self._analyze_function(declaration)
        return self._analyze_constructor(declaration)

    def enclosing_declaration(self, node: SyntaxNode) -> SyntaxNode | None:
        if node.kind in DECLARATION_KINDS:
            return node
        return node.enclosing(*DECLARATION_KINDS)

    def has_handle_parameter(self, declaration: SyntaxNode) -> bool:
        return any(self.profile.is_handle_type(p.type_name) for p in declaration.parameters)

    def is_ui_class(self, declaration: SyntaxNode) -> bool:
        owner = declaration.enclosing(NodeKind.CLASS)
        return owner is not None and self.profile.is_ui_type(owner.superclass)

    def is_render_entry(self, method: SyntaxNode) -> bool:
        """The render method of a UI class, or one taking the conventional handle name."""
        if method.kind is not NodeKind.METHOD or method.name != self.profile.render_method:
            return False
        if self.is_ui_class(method):
            return True
        return any(p.name == self.profile.handle_name for p in method.parameters)

    def _analyze_method(self, method: SyntaxNode) -> ContextAvailability:
        if method.is_static:
            return ContextAvailability.REQUIRES_MANUAL
        if self.is_render_entry(method):
            return ContextAvailability.AVAILABLE
        if self.has_handle_parameter(method):
            return ContextAvailability.AVAILABLE
        if self.is_ui_class(method):
            return ContextAvailability.CAN_INJECT
        return ContextAvailability.REQUIRES_MANUAL

    def _analyze_function(self, function: SyntaxNode) -> ContextAvailability:
        if self.has_handle_parameter(function):
            return ContextAvailability.AVAILABLE
        if function.has_body:
            return ContextAvailability.CAN_INJECT
        return ContextAvailability.REQUIRES_MANUAL

    def _analyze_constructor(self, constructor: SyntaxNode) -> ContextAvailability:
        if constructor.is_const:
            return ContextAvailability.UNAVAILABLE
        if self.has_handle_parameter(constructor):
            return ContextAvailability.AVAILABLE
        return ContextAvailability.REQUIRES_MANUAL

    def can_auto_inject(self, node: SyntaxNode) -> bool:
        return self.analyze(node) in (ContextAvailability.AVAILABLE, ContextAvailability.CAN_INJECT)

    def is_in_render_method(self, node: SyntaxNode) -> bool:
        return any(
            ancestor.kind is NodeKind.METHOD and ancestor.name == self.profile.render_method
            for ancestor in node.ancestors()
        )

    def manual_intervention_reasons(self, node: SyntaxNode) -> list[str]:
        """Human-readable reasons a node cannot take the rewrite as-is. Empty if it can."""
        availability = self.analyze(node)
        accessor = self.profile.accessor_call
        handle = self.profile.handle_type

        if availability is ContextAvailability.UNAVAILABLE:
            if any(a.kind is NodeKind.CONSTRUCTOR and a.is_const for a in node.ancestors()):
                return [f"Cannot use {accessor} in const constructor"]
            return [f"{handle} not available in this scope"]

        if availability is ContextAvailability.REQUIRES_MANUAL:
            if any(a.kind is NodeKind.METHOD and a.is_static for a in node.ancestors()):
                return [f"Cannot use {accessor} in static method"]
            return [f"{handle} parameter needs to be added manually"]

        if node.in_const:
            return [f"Cannot use {accessor} inside a const expression"]

        return []
