"""Services: archiving, unarchiving and fixture generation."""
