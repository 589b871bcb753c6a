from typing import Callable, Optional

from colorama import Fore, Style

class SafetyLock:
    """
    Demands explicit human consent before disruptive maintenance
    (wiping caches, removing printer queues).
    """
    def __init__(self, input_fn: Optional[Callable[[str], str]] = None):
        self.input_fn = input_fn or input

    def require_consent(self, prompt: str) -> bool:
        try:
            val = self.input_fn(f"{Fore.YELLOW}{prompt} (y/n): {Style.RESET_ALL}")
        except EOFError:
            # Non-interactive stdin: treat as a refusal
            print("\n[!] No answer on stdin. Treating as 'no'.")
            return False

        return val.strip().lower() == "y"
