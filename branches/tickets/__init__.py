"""
Tickets Branch
Private channel-based ticket system with a category panel.

Structure:
- branch.py: Tickets cog, panel setup and interaction hook
- manager.py: TicketManager (open, form submission, close)
- categories.py: CategoryProvisioner
- router.py: InteractionRouter (custom_id dispatch)
- views.py: Panel and close button components, embeds
- modals.py: TicketFormModal for form-gated ticket types
- helpers.py: Ticket types, settings and config loading
"""

from .branch import Tickets

__all__ = ['Tickets', 'setup']

async def setup(bot):
    """Load the Tickets branch."""
    await bot.add_cog(Tickets(bot))
