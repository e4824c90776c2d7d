"""Critical-path scheduling engine.

Entry point is ``builder.calculate_project_schedule``; the other modules are
the pipeline stages it runs, each a pure function over its inputs.
"""
