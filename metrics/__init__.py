from metrics.config import MetricsConfigHelper
from metrics.formatting import format_currency, format_number, pagination_summary
from metrics.mining import MiningMetricsHelper
from metrics.ownership import OwnershipHelper
from metrics.referrals import ReferralAggregationHelper
from metrics.status import is_credit, is_expired
