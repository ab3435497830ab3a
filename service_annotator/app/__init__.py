"""
Annotator service package.

This package keeps target objects annotated according to a declarative
policy read from one well-known source object. It provides:

- app.rules: Pattern matcher, rule model, rule set and the rule store.
- app.reconciler: Annotation diff/converge with provenance tracking.
- app.repository: Object models, repository protocol and an in-memory store.
- app.controllers: Event handlers for source, target and namespace events.
- app.main: Service wiring and event dispatch.

Guidelines:
- The reconciler is stateless; the rule store is the only shared state.
- Never disturb annotations the annotator does not own.
- Keep reconciliation deterministic and observable (logs).
"""
