"""Built-in source stages.

Sources have no upstream channel; they read from the filesystem and push
into their writer once the host awaits the start action.

Stages are looked up via PluginManager, not direct imports:
    manager = PluginManager()
    manager.register_builtin_plugins()
    source_cls = manager.get_stage_by_name("glob_read")
"""
