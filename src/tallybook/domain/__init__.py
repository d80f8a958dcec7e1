"""Domain layer for tallybook application.

Services are imported from their modules (``tallybook.domain.account`` and
so on). The database layer imports ``tallybook.domain.entities``, so this
package must not import the services eagerly.
"""
