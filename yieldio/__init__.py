from .adapter import AlreadyTaken as AlreadyTaken
from .adapter import Pending as Pending
from .adapter import adapt as adapt
from .executor import Execution as Execution
from .executor import Executor as Executor
from .executor import State as State
from .executor import execute as execute
from .fault import fault_handler as fault_handler
from .run import later as later
from .run import run as run
from .run import to_future as to_future
from .suspend import suspend as suspend
from .wrap import wrap as wrap
from .yieldable import CallbackError as CallbackError
from .yieldable import CallbackTask as CallbackTask
from .yieldable import Collection as Collection
from .yieldable import NestedProgram as NestedProgram
from .yieldable import Thenable as Thenable
from .yieldable import Value as Value
from .yieldable import classify as classify
