"""Change notifications published after successful movie mutations."""
