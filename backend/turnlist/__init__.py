"""Turnlist: регистрация в очередь на игру и админка."""
