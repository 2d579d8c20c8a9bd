def text(data: dict, key: str) -> str:
    """JSON alanını kırpılmış metin olarak döner; sayı gelirse de metne çevrilir."""
    value = data.get(key)
    return str(value).strip() if value is not None else ""
