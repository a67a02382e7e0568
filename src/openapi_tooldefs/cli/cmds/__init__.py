from openapi_tooldefs.cli.cmds.generate_cmds import register as register_generate

__all__ = ["register_generate"]
