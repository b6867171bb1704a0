"""
Welcome Branch
Gives new members a role and posts a greeting.
"""

from .branch import Welcome

__all__ = ['Welcome', 'setup']

async def setup(bot):
    """Load the Welcome branch."""
    await bot.add_cog(Welcome(bot))
