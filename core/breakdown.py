# core/breakdown.py - Group-by counts for breakdown charts

import pandas as pd


def aggregate(values):
    """
    Count each distinct value and return chart rows:
    [{'name': ..., 'value': count, 'percentage': '42.9'}, ...]
    Most frequent first; equal counts are ordered by name.
    """
    series = pd.Series(list(values), dtype='object')
    total = len(series)
    if total == 0:
        return []

    counts = series.value_counts(sort=False).rename_axis('name').reset_index(name='value')
    counts['name'] = counts['name'].astype(str)
    counts = counts.sort_values(['value', 'name'], ascending=[False, True], kind='mergesort')

    rows = []
    for name, value in zip(counts['name'], counts['value']):
        rows.append({
            'name': name,
            'value': int(value),
            'percentage': f"{(value / total) * 100:.1f}",
        })
    return rows
