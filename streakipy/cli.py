"""
    streakipy - tools and library for a habit tracker restful API
    command-line interface library using plumbum
"""
# pylint: disable=arguments-differ, attribute-defined-outside-init
# pylint: disable=invalid-name, logging-format-interpolation,too-few-public-methods
import logging
from getpass import getpass
from importlib.metadata import version
from typing import Any, Dict, List, Optional, Union
from plumbum import local, cli
from .api import HabitClient, ApiError, token_from, DEFAULT_URL, DEFAULT_TIMEOUT
from .guard import Navigator, RouteGuard, LOGIN_PAGE, SIGNUP_PAGE, DASHBOARD_PAGE
from .session import Session
from .store import TokenStore, DEFAULT_TOKEN_FILE
from .util import get_translation_functions, streak_bar


DEFAULT_CONF = '~/.config/streakipy/config'
_, ngettext = get_translation_functions('streakipy', names=('gettext', 'ngettext'))
YES_ANSWERS = ('yes', 'y', 'true', 'True', '1')
FETCH_FAILED = _("Failed to fetch data. Please try again.")  # noqa: Q000
GENERIC_ERROR = _("An error occurred. Please try again.")  # noqa: Q000


def is_email(s):
    """validator for plumbum prompt"""
    if isinstance(s, str) and '@' in s.strip('@'):
        return s
    return False


def load_conf(configfile, config=None):
    """Get backend url and client preferences from the config file."""
    config = config or {}
    configfile = local.path(configfile)
    if not configfile.exists():
        configfile.dirname.mkdir()
    with cli.Config(configfile) as conf:
        config['url'] = conf.get('streakipy.url', DEFAULT_URL)
        config['token_file'] = conf.get('streakipy.token_file', DEFAULT_TOKEN_FILE)
        config['show_numbers'] = conf.get('streakipy.show_numbers', 'y')
        config['show_numbers'] = config['show_numbers'] in YES_ANSWERS
        config['timeout'] = float(conf.get('streakipy.timeout', str(int(DEFAULT_TIMEOUT))))
        config['logout_on_unauthorized'] = conf.get('streakipy.logout_on_unauthorized', 'n')
        config['logout_on_unauthorized'] = config['logout_on_unauthorized'] in YES_ANSWERS
    return config


class ConfiguredApplication(cli.Application):
    """Application with config"""
    config_filename = cli.SwitchAttr(
        ['-c', '--config'], argtype=local.path, default=DEFAULT_CONF,
        argname='CONFIG',
        help=_("Use file CONFIG for config"))  # noqa: Q000
    url = cli.SwitchAttr(
        ['--url'], argname='URL', envname='STREAKIPY_URL',
        help=_("Use backend at URL instead of the configured one"))  # noqa: Q000
    verbose = cli.Flag(
        ['-v', '--verbose'],
        help=_("Verbose output - log everything."),  # noqa: Q000
        excludes=['-s', '--silent'])
    silence_level = cli.CountOf(
        ['-s', '--silent'],
        help=_("Make program more silent"),  # noqa: Q000
        excludes=['-v', '--verbose'])

    def main(self):
        self.config = load_conf(self.config_filename)
        if self.url:
            self.config['url'] = self.url
        self.log = logging.getLogger(str(self.__class__).split("'")[1])
        if not self.log.handlers:
            self.log.addHandler(logging.StreamHandler())
        if self.verbose:
            self.log.setLevel(logging.DEBUG)
        else:
            base_level = logging.INFO
            self.log.setLevel(base_level + 10 * self.silence_level)


class ApplicationWithApi(ConfiguredApplication):
    """
    Application with a session, a route guard and the backend API.

    `location` is where the command lives. When the guard sends the session
    elsewhere on start, `redirected` is set and the command should stop.
    """
    location = LOGIN_PAGE
    api = None  # type: HabitClient

    def main(self):
        super().main()
        self.session = Session(TokenStore(self.config['token_file']))
        self.navigator = Navigator(self.location)
        self.guard = RouteGuard(self.session, self.navigator)
        self.api = HabitClient(
            self.config, self.session,
            logout_on_unauthorized=self.config['logout_on_unauthorized'])
        self.redirected = self.navigator.location != self.location
        if self.redirected:
            self.log.error(_("You are not logged in. Run 'streakipy login' first."))  # noqa: Q000

    def fetch_habits(self):
        """habits of the current user or None after logging the failure"""
        try:
            habits = self.api.habits()
        except ApiError as error:
            self.log.debug(str(error))
            self.log.error(FETCH_FAILED)
            return None
        return habits

    def print_habits(self, habits):
        if not habits:
            print(_("No habits found. Add a new habit!"))  # noqa: Q000
            return
        ident_size = len(str(len(habits))) + 2
        number_format = '{{:{}d}}. '.format(ident_size - 2)
        for i, habit in enumerate(habits):
            i = number_format.format(i + 1) if self.config['show_numbers'] else ''
            streak = habit.get('streak') or 0
            print(i + _("{name} streak: {streak} {bar}").format(  # noqa: Q000
                name=habit.get('name', ''), streak=streak, bar=streak_bar(streak)))
            if habit.get('description'):
                print(' ' * len(i) + habit['description'])

    def show_dashboard(self):
        """points, badges and habits of the current user"""
        if not self.guard.allows(DASHBOARD_PAGE):
            return 1
        habits = self.fetch_habits()
        if habits is None:
            return 1
        try:
            user = self.api.me()
        except ApiError as error:
            self.log.debug(str(error))
            self.log.error(FETCH_FAILED)
            return 1
        print(_("Points: {}").format(user.get('points', 0)))  # noqa: Q000
        print_badges(user.get('badges') or [])
        self.print_habits(habits)
        return 0


def print_badges(badges):
    if not badges:
        print(_("No badges yet. Keep going!"))  # noqa: Q000
        return
    print(ngettext("{} badge:", "{} badges:", len(badges)).format(len(badges)))  # noqa: Q000
    for badge in badges:
        print('  * ' + badge)


class StreakipyCli(ConfiguredApplication):  # pylint: disable=missing-docstring
    DESCRIPTION = _("tools and library for a habit tracker restful API")  # noqa: Q000
    VERSION = version('streakipy')

    def main(self):
        if self.nested_command:
            return
        super().main()
        self.log.error(_("No subcommand given, exiting"))  # noqa: Q000


@StreakipyCli.subcommand('signup')  # pylint: disable=missing-docstring
class Signup(ApplicationWithApi):
    DESCRIPTION = _("Create a new account")  # noqa: Q000
    location = SIGNUP_PAGE
    username = cli.SwitchAttr(
        ['-u', '--username'], argname='USERNAME',
        help=_("Username of the new account"))  # noqa: Q000
    email = cli.SwitchAttr(
        ['-e', '--email'], argname='EMAIL',
        help=_("Email of the new account"))  # noqa: Q000

    def main(self):
        super().main()
        username = self.username or cli.terminal.prompt(_("Username"))  # noqa: Q000
        email = self.email or cli.terminal.prompt(_("Email"), validator=is_email)  # noqa: Q000
        password = getpass(_("Password: "))  # noqa: Q000
        try:
            self.api.register(username, email, password)
        except ApiError as error:
            self.log.debug(str(error))
            self.log.error(error.msg or GENERIC_ERROR)
            return 1
        self.navigator.navigate(LOGIN_PAGE)
        print(_("Account {} created. Log in with 'streakipy login'.").format(username))  # noqa: Q000
        return 0


@StreakipyCli.subcommand('login')  # pylint: disable=missing-docstring
class Login(ApplicationWithApi):
    DESCRIPTION = _("Log in and remember the session")  # noqa: Q000
    email = cli.SwitchAttr(
        ['-e', '--email'], argname='EMAIL',
        help=_("Email to log in with"))  # noqa: Q000

    def main(self):
        super().main()
        email = self.email or cli.terminal.prompt(_("Email"), validator=is_email)  # noqa: Q000
        password = getpass(_("Password: "))  # noqa: Q000
        try:
            token = token_from(self.api.login(email, password))
        except ApiError as error:
            self.log.debug(str(error))
            self.log.error(error.msg or GENERIC_ERROR)
            return 1
        self.session.login(token)
        self.navigator.navigate(DASHBOARD_PAGE)
        print(_("Logged in as {}").format(email))  # noqa: Q000
        self.show_dashboard()
        return 0


@StreakipyCli.subcommand('logout')  # pylint: disable=missing-docstring
class Logout(ApplicationWithApi):
    DESCRIPTION = _("Forget the stored session")  # noqa: Q000

    def main(self):
        super().main()
        self.session.logout()
        print(_("Logged out"))  # noqa: Q000
        return 0


@StreakipyCli.subcommand('status')  # pylint: disable=missing-docstring
class Status(ApplicationWithApi):
    DESCRIPTION = _("Show points, badges and habits")  # noqa: Q000
    location = DASHBOARD_PAGE

    def main(self):
        super().main()
        if self.redirected:
            return 1
        return self.show_dashboard()


class HabitsApplication(ApplicationWithApi):
    """Application working on the habit list of the authenticated home"""
    location = DASHBOARD_PAGE

    def list_habits(self):
        habits = self.fetch_habits()
        if habits is None:
            return 1
        self.print_habits(habits)
        return 0


@StreakipyCli.subcommand('habits')  # pylint: disable=missing-docstring
class Habits(HabitsApplication):
    DESCRIPTION = _("List, add and complete habits")  # noqa: Q000

    def main(self):
        if self.nested_command:
            return None
        super().main()
        if self.redirected:
            return 1
        return self.list_habits()


@Habits.subcommand('add')  # pylint: disable=missing-docstring
class HabitsAdd(HabitsApplication):
    DESCRIPTION = _("Add a habit <name>")  # noqa: Q000
    description = cli.SwitchAttr(
        ['-d', '--description'], default='',
        help=_("Longer description of the habit"))  # noqa: Q000

    def main(self, *name: str):
        super().main()
        if self.redirected:
            return 1
        habit_str = ' '.join(name)
        if not habit_str:
            self.log.error(_("Empty habit name!"))  # noqa: Q000
            return 1
        try:
            self.api.add_habit(habit_str, self.description)
        except ApiError as error:
            self.log.debug(str(error))
            self.log.error(_("Failed to add habit."))  # noqa: Q000
            return 1
        print(_("Added habit '{}'").format(habit_str))  # noqa: Q000
        return self.list_habits()


class HabitId(List[Union[str, int]]):
    """
    handle habit-id formats such as:
        streakipy habits done 3 habit_name_or_id
        streakipy habits done 1,2,3,habit_id
        streakipy habits done 2 3
        streakipy habits done 1-3,4 8
    """
    def __new__(cls, hids: str):
        habit_ids = []  # type: List[Union[str, int]]
        for bit in hids.split(','):
            try:
                if '-' in bit:
                    start, stop = [int(e) for e in bit.split('-')]
                    habit_ids.extend(range(start, stop + 1))
                else:
                    habit_ids.append(int(bit))
            except ValueError:
                habit_ids.append(bit)
        return [e - 1 if isinstance(e, int) else e for e in habit_ids]  # type: ignore


@Habits.subcommand('done')  # pylint: disable=missing-docstring
class HabitsDone(HabitsApplication):
    DESCRIPTION = _("Mark habits with habit_id as completed")  # noqa: Q000
    noop = cli.Flag(
        ['--dry-run', '--noop'],
        help=_("If passed, won't actually change anything on the server"),  # noqa: Q000
        default=False)
    NO_HABIT_ID = _("No habit_ids found!")  # noqa: Q000
    HABIT_ID_INVALID = _("Habit id {} is invalid")  # noqa: Q000
    PARSED_HABIT_IDS = _("Parsed habit ids {}")  # noqa: Q000

    def main(self, *habit_ids: HabitId):  # type: ignore
        super().main()
        if self.redirected:
            return 1
        habit_id = []  # type: List[Union[str, int]]
        for hids in habit_ids:
            habit_id.extend(hids)
        if not habit_id:
            self.log.error(self.NO_HABIT_ID)
            return 1
        habits = self.fetch_habits()
        if habits is None:
            return 1
        changing = self.resolve(habits, habit_id)
        if changing is None:
            return 1
        self.log.info(self.PARSED_HABIT_IDS.format(' '.join(changing)))
        for hid, habit in changing.items():
            if self.noop:
                print(_("Would complete habit {}").format(habit.get('name', hid)))  # noqa: Q000
                continue
            try:
                res = self.api.complete_habit(hid)
            except ApiError as error:
                self.log.debug(str(error))
                self.log.error(_("Failed to mark habit as completed."))  # noqa: Q000
                return 1
            print(_("Habit marked as completed! Points: {}").format(  # noqa: Q000
                res.get('points', 0)))
            if res.get('badges'):
                print_badges(res['badges'])
        return self.list_habits()

    def resolve(self, habits, habit_id) -> Optional[Dict[str, Dict[str, Any]]]:
        """map list numbers, ids and names to habits, keeping order"""
        ids = [habit['_id'] for habit in habits]
        names = {habit['name']: habit for habit in habits if 'name' in habit}
        changing = {}  # type: Dict[str, Dict[str, Any]]
        for hid in habit_id:
            if isinstance(hid, int):
                if 0 <= hid < len(habits):
                    changing[ids[hid]] = habits[hid]
                    continue
            elif hid in ids:
                changing[hid] = habits[ids.index(hid)]
                continue
            elif hid in names:
                changing[names[hid]['_id']] = names[hid]
                continue
            self.log.error(self.HABIT_ID_INVALID.format(hid))
            return None
        return changing


if __name__ == '__main__':
    StreakipyCli.run()
