from typing import Dict, List, Any, Optional, Tuple
import pandas as pd
from datetime import datetime, timedelta

from .. import CHANNELS, PAYMENT_METHODS

SALE_COLUMNS = ['id', 'type', 'presentation_name', 'price_base', 'quantity', 'total', 'date', 'payment_method']

CARD_PERIODS = ['today', 'yesterday', 'week', 'month']

# strftime patterns of the trend buckets
BUCKET_FORMATS = {
    'hourly': '%H',
    'hourly_dated': '%Y-%m-%d %H',
    'daily': '%Y-%m-%d',
    'monthly': '%Y-%m',
}


def get_period_range(period: str,
                     custom_range: Optional[Dict[str, str]] = None,
                     now: Optional[datetime] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Resolve a named reporting period into an inclusive [start, end] range.

    Weeks start on Monday. An open end (None) means "up to now". Custom ranges
    take {'from': 'YYYY-MM-DD', 'to': 'YYYY-MM-DD'} and cover both full days.
    """
    now = now or datetime.now()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == 'today':
        return today, None
    if period == 'yesterday':
        return today - timedelta(days=1), today
    if period == 'week':
        return today - timedelta(days=today.weekday()), None
    if period == 'month':
        return today.replace(day=1), None
    if period == 'custom' and custom_range and custom_range.get('from') and custom_range.get('to'):
        start = datetime.fromisoformat(custom_range['from'])
        end = datetime.fromisoformat(custom_range['to']) + timedelta(days=1) - timedelta(microseconds=1)
        return start, end

    return None, None


def trend_bucket(period: str,
                 custom_range: Optional[Dict[str, str]] = None,
                 expanded: bool = False) -> str:
    """Choose the trend granularity for a period"""
    if period == 'week':
        return 'hourly_dated' if expanded else 'daily'
    if period == 'month':
        return 'daily'
    if period == 'custom' and custom_range and custom_range.get('from') and custom_range.get('to'):
        if custom_range['from'] == custom_range['to']:
            return 'hourly'
        span = abs((datetime.fromisoformat(custom_range['to']) -
                    datetime.fromisoformat(custom_range['from'])).days)
        if span > 180:
            return 'daily' if expanded else 'monthly'
        return 'daily'
    return 'hourly'


class SalesReport:
    """Aggregations over persisted sales for the reports view"""

    def __init__(self, sales: List[Dict[str, Any]], now: Optional[datetime] = None):
        self.now = now or datetime.now()
        self.df = pd.DataFrame(sales, columns=SALE_COLUMNS) if sales else pd.DataFrame(columns=SALE_COLUMNS)
        self.df['date'] = pd.to_datetime(self.df['date'], format='ISO8601')
        self.df['total'] = pd.to_numeric(self.df['total']).fillna(0)
        self.df['quantity'] = pd.to_numeric(self.df['quantity']).fillna(0)
        self.df['payment_method'] = self.df['payment_method'].fillna(PAYMENT_METHODS[0])

    def filter(self,
               start: Optional[datetime] = None,
               end: Optional[datetime] = None,
               channel: str = 'all') -> pd.DataFrame:
        """Sales within [start, end] on a channel ('all' for every channel)"""
        mask = pd.Series(True, index=self.df.index)
        if start is not None:
            mask &= self.df['date'] >= start
        if end is not None:
            mask &= self.df['date'] <= end
        if channel != 'all':
            mask &= self.df['type'] == channel
        return self.df[mask]

    def channel_stats(self, period: str = 'today') -> Dict[str, Dict[str, float]]:
        """Sale count and revenue per channel plus the general total"""
        start, end = get_period_range(period, now=self.now)
        sales = self.filter(start, end)

        stats = {}
        for channel in CHANNELS:
            channel_sales = sales[sales['type'] == channel]
            stats[channel] = {'count': int(len(channel_sales)), 'total': float(channel_sales['total'].sum())}

        stats['general'] = {
            'count': sum(s['count'] for s in stats.values()),
            'total': sum(s['total'] for s in stats.values())
        }
        return stats

    def period_cards(self, channel: str = 'all',
                     custom_range: Optional[Dict[str, str]] = None) -> Dict[str, Dict[str, float]]:
        """Count and revenue for each summary card period"""
        cards = {}
        for period in CARD_PERIODS + ['custom']:
            if period == 'custom' and not custom_range:
                cards[period] = {'count': 0, 'revenue': 0.0}
                continue
            start, end = get_period_range(period, custom_range, self.now)
            sales = self.filter(start, end, channel)
            cards[period] = {'count': int(len(sales)), 'revenue': float(sales['total'].sum())}
        return cards

    def payment_breakdown(self, period: str, custom_range: Optional[Dict[str, str]] = None,
                          channel: str = 'all') -> Dict[str, Dict[str, float]]:
        start, end = get_period_range(period, custom_range, self.now)
        sales = self.filter(start, end, channel)
        grouped = sales.groupby('payment_method')['total'].agg(['count', 'sum'])

        return {
            method: {
                'count': int(grouped.loc[method, 'count']) if method in grouped.index else 0,
                'revenue': float(grouped.loc[method, 'sum']) if method in grouped.index else 0.0
            }
            for method in PAYMENT_METHODS
        }

    def presentation_ranking(self, period: str, custom_range: Optional[Dict[str, str]] = None,
                             channel: str = 'all') -> List[Dict[str, Any]]:
        """Units and revenue per presentation, best sellers first"""
        start, end = get_period_range(period, custom_range, self.now)
        sales = self.filter(start, end, channel)
        if sales.empty:
            return []

        ranking = (sales.groupby('presentation_name')
                   .agg(units=('quantity', 'sum'), revenue=('total', 'sum'))
                   .sort_values('units', ascending=False, kind='stable'))

        return [
            {'name': name, 'units': int(row['units']), 'revenue': float(row['revenue'])}
            for name, row in ranking.iterrows()
        ]

    def revenue_trend(self, period: str, custom_range: Optional[Dict[str, str]] = None,
                      channel: str = 'all', expanded: bool = False) -> Dict[str, Any]:
        """Revenue bucketed by hour, day or month depending on the period length"""
        bucket = trend_bucket(period, custom_range, expanded)
        start, end = get_period_range(period, custom_range, self.now)
        sales = self.filter(start, end, channel)

        if sales.empty:
            points = []
        else:
            labels = sales['date'].dt.strftime(BUCKET_FORMATS[bucket])
            trend = sales.groupby(labels)['total'].sum().sort_index()
            points = [{'label': label, 'total': float(total)} for label, total in trend.items()]

        return {
            'bucket': bucket,
            'is_hourly': bucket in ('hourly', 'hourly_dated'),
            'is_daily': bucket == 'daily',
            'is_monthly': bucket == 'monthly',
            'trend': points
        }
