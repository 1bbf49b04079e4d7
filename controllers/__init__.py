from controllers.banners import BannersController
from controllers.base import Debouncer, ListController, ReviewController
from controllers.coins import CoinManagementController
from controllers.dashboard import DashboardController
from controllers.kyc import KYCController
from controllers.mining import MiningController
from controllers.notifications import NotificationsController
from controllers.payments import PaymentsController
from controllers.promo_codes import PromoCodesController
from controllers.referrals import ReferralsController
from controllers.settings import SettingsController
from controllers.users import UsersController
