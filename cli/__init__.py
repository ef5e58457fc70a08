"""
Terminal client for RechargeEarn.

- display: rich renderers and logging setup
- commands: one async handler per subcommand
"""
