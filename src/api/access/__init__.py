"""Access bounded context.

Answers "can subject S perform relation R on resource O" for the partner
portal and keeps relationship facts consistent as resources come and go.
"""
